from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional, Tuple

from ..core.exceptions import ValidationError

MAX_AISLES = 99
MAX_SHELVES = 99
MAX_BINS_PER_SHELF = 26
MAX_BINS_PER_ZONE = 10000


class BinLabeling(str, Enum):
    LETTERS = "LETTERS"
    NUMBERS = "NUMBERS"


@dataclass(frozen=True)
class CodePattern:
    """How bin addresses are spelled, e.g. ``WH-ZN-01-01-A``."""

    separator: str = "-"
    aisle_digits: int = 2
    shelf_digits: int = 2
    bin_labeling: BinLabeling = BinLabeling.LETTERS

    def __post_init__(self):
        if not 1 <= self.aisle_digits <= 3 or not 1 <= self.shelf_digits <= 3:
            raise ValidationError("Aisle and shelf digits must be between 1 and 3")
        if len(self.separator) > 1:
            raise ValidationError("Separator must be a single character")

    def format_position(self, index: int, bins_per_shelf: int) -> str:
        if self.bin_labeling == BinLabeling.NUMBERS:
            return str(index + 1).zfill(len(str(bins_per_shelf)))
        return string.ascii_uppercase[index]

    def generate_address(
        self, warehouse_code: str, zone_code: str, aisle: int, shelf: int, index: int, bins_per_shelf: int
    ) -> str:
        parts = (
            warehouse_code,
            zone_code,
            str(aisle).zfill(self.aisle_digits),
            str(shelf).zfill(self.shelf_digits),
            self.format_position(index, bins_per_shelf),
        )
        return self.separator.join(parts)

    def to_dict(self) -> dict:
        return {
            "separator": self.separator,
            "aisleDigits": self.aisle_digits,
            "shelfDigits": self.shelf_digits,
            "binLabeling": self.bin_labeling.value,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "CodePattern":
        if not data:
            return cls()
        labeling = str(data.get("binLabeling", data.get("bin_labeling", "LETTERS"))).upper()
        try:
            bin_labeling = BinLabeling(labeling)
        except ValueError:
            raise ValidationError("Bin labeling must be LETTERS or NUMBERS")
        return cls(
            separator=data.get("separator", "-"),
            aisle_digits=int(data.get("aisleDigits", data.get("aisle_digits", 2))),
            shelf_digits=int(data.get("shelfDigits", data.get("shelf_digits", 2))),
            bin_labeling=bin_labeling,
        )


@dataclass(frozen=True)
class AisleConfig:
    aisle_number: int
    shelves_count: int
    bins_per_shelf: int


class BinData(NamedTuple):
    address: str
    aisle: int
    shelf: int
    position: str


def _check_range(value: int, name: str, maximum: int) -> int:
    if value is None or not 0 <= value <= maximum:
        raise ValidationError(f"{name} must be between 0 and {maximum}")
    return value


@dataclass(frozen=True)
class ZoneStructure:
    aisles: int = 0
    shelves_per_aisle: int = 0
    bins_per_shelf: int = 0
    aisle_configs: Tuple[AisleConfig, ...] = ()
    code_pattern: CodePattern = field(default_factory=CodePattern)
    dimensions: Optional[dict] = field(default=None, compare=False)

    def __post_init__(self):
        _check_range(self.aisles, "Aisles", MAX_AISLES)
        _check_range(self.shelves_per_aisle, "Shelves per aisle", MAX_SHELVES)
        _check_range(self.bins_per_shelf, "Bins per shelf", MAX_BINS_PER_SHELF)
        configs = tuple(sorted(self.aisle_configs, key=lambda c: c.aisle_number))
        for config in configs:
            _check_range(config.aisle_number, "Aisle number", MAX_AISLES)
            _check_range(config.shelves_count, "Shelves count", MAX_SHELVES)
            _check_range(config.bins_per_shelf, "Bins per shelf", MAX_BINS_PER_SHELF)
        if len({c.aisle_number for c in configs}) != len(configs):
            raise ValidationError("Aisle configs must not repeat an aisle number")
        object.__setattr__(self, "aisle_configs", configs)
        if configs:
            # the summary counts grow to cover the per-aisle overrides
            object.__setattr__(self, "aisles", max(self.aisles, len(configs), configs[-1].aisle_number))
            object.__setattr__(
                self, "shelves_per_aisle", max(self.shelves_per_aisle, *(c.shelves_count for c in configs))
            )
            object.__setattr__(
                self, "bins_per_shelf", max(self.bins_per_shelf, *(c.bins_per_shelf for c in configs))
            )

    def _layout(self) -> List[AisleConfig]:
        if self.aisle_configs:
            return list(self.aisle_configs)
        return [AisleConfig(a, self.shelves_per_aisle, self.bins_per_shelf) for a in range(1, self.aisles + 1)]

    @property
    def total_shelves(self) -> int:
        return sum(c.shelves_count for c in self._layout())

    @property
    def total_bins(self) -> int:
        return sum(c.shelves_count * c.bins_per_shelf for c in self._layout())

    @property
    def is_configured(self) -> bool:
        return any(c.shelves_count > 0 and c.bins_per_shelf > 0 for c in self._layout())

    def generate_bin_data(self, warehouse_code: str, zone_code: str) -> Iterator[BinData]:
        pattern = self.code_pattern
        for config in self._layout():
            for shelf in range(1, config.shelves_count + 1):
                for index in range(config.bins_per_shelf):
                    yield BinData(
                        address=pattern.generate_address(
                            warehouse_code, zone_code, config.aisle_number, shelf, index, config.bins_per_shelf
                        ),
                        aisle=config.aisle_number,
                        shelf=shelf,
                        position=pattern.format_position(index, config.bins_per_shelf),
                    )

    def to_dict(self) -> dict:
        out = {
            "aisles": self.aisles,
            "shelvesPerAisle": self.shelves_per_aisle,
            "binsPerShelf": self.bins_per_shelf,
            "codePattern": self.code_pattern.to_dict(),
        }
        if self.aisle_configs:
            out["aisleConfigs"] = [
                {"aisleNumber": c.aisle_number, "shelvesCount": c.shelves_count, "binsPerShelf": c.bins_per_shelf}
                for c in self.aisle_configs
            ]
        if self.dimensions:
            out["dimensions"] = dict(self.dimensions)
        return out

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ZoneStructure":
        if not data:
            return cls()
        configs = tuple(
            AisleConfig(
                aisle_number=int(c.get("aisleNumber", c.get("aisle_number"))),
                shelves_count=int(c.get("shelvesCount", c.get("shelves_count", 0))),
                bins_per_shelf=int(c.get("binsPerShelf", c.get("bins_per_shelf", 0))),
            )
            for c in data.get("aisleConfigs") or data.get("aisle_configs") or ()
        )
        return cls(
            aisles=int(data.get("aisles", 0)),
            shelves_per_aisle=int(data.get("shelvesPerAisle", data.get("shelves_per_aisle", 0))),
            bins_per_shelf=int(data.get("binsPerShelf", data.get("bins_per_shelf", 0))),
            aisle_configs=configs,
            code_pattern=CodePattern.from_dict(data.get("codePattern") or data.get("code_pattern")),
            dimensions=data.get("dimensions"),
        )