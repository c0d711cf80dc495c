"""Permission catalogue used by the HTTP routes and seeded on bootstrap."""

FULL_ACCESS = "*.*.*"

ADMIN_TENANTS_MANAGE = "admin.tenants.manage"

CORE_USERS_READ = "core.users.read"
CORE_USERS_CREATE = "core.users.create"
CORE_USERS_UPDATE = "core.users.update"
CORE_USERS_DELETE = "core.users.delete"

RBAC_PERMISSIONS_MANAGE = "rbac.permissions.manage"
RBAC_GROUPS_MANAGE = "rbac.groups.manage"
RBAC_ASSIGNMENTS_MANAGE = "rbac.assignments.manage"

AUDIT_LOGS_READ = "audit.logs.read"

NOTIFICATIONS_SEND = "notifications.notifications.send"

HR_EMPLOYEES_READ = "hr.employees.read"
HR_EMPLOYEES_MANAGE = "hr.employees.manage"
HR_ABSENCES_REQUEST = "hr.absences.request"
HR_ABSENCES_READ = "hr.absences.read"
HR_ABSENCES_APPROVE = "hr.absences.approve"
HR_VACATIONS_MANAGE = "hr.vacations.manage"
HR_PAYROLLS_READ = "hr.payrolls.read"
HR_PAYROLLS_MANAGE = "hr.payrolls.manage"
HR_PAYROLLS_APPROVE = "hr.payrolls.approve"
HR_DEDUCTIONS_MANAGE = "hr.deductions.manage"

FINANCE_ENTRIES_READ = "finance.entries.read"
FINANCE_ENTRIES_MANAGE = "finance.entries.manage"
FINANCE_ENTRIES_PAY = "finance.entries.pay"
FINANCE_LOANS_MANAGE = "finance.loans.manage"
FINANCE_SETUP_MANAGE = "finance.setup.manage"
FINANCE_EXPORT = "finance.reports.export"

STOCK_LOCATIONS_READ = "stock.locations.read"
STOCK_LOCATIONS_MANAGE = "stock.locations.manage"
STOCK_ITEMS_READ = "stock.items.read"
STOCK_ITEMS_MANAGE = "stock.items.manage"
STOCK_VARIANTS_MANAGE = "stock.variants.manage"
STOCK_VOLUMES_MANAGE = "stock.volumes.manage"

SALES_CUSTOMERS_READ = "sales.customers.read"
SALES_CUSTOMERS_MANAGE = "sales.customers.manage"
SALES_ORDERS_READ = "sales.orders.read"
SALES_ORDERS_MANAGE = "sales.orders.manage"
SALES_PROMOTIONS_MANAGE = "sales.promotions.manage"

REQUESTS_CREATE = "requests.requests.create"
REQUESTS_VIEW_ALL = "requests.requests.view-all"
REQUESTS_MANAGE = "requests.requests.manage"

STORAGE_FILES_UPLOAD = "storage.files.upload"

ALL_PERMISSIONS = [
    (FULL_ACCESS, "Full access"),
    (ADMIN_TENANTS_MANAGE, "Manage tenants"),
    (CORE_USERS_READ, "List users"),
    (CORE_USERS_CREATE, "Create users"),
    (CORE_USERS_UPDATE, "Update users"),
    (CORE_USERS_DELETE, "Delete users"),
    (RBAC_PERMISSIONS_MANAGE, "Manage permissions"),
    (RBAC_GROUPS_MANAGE, "Manage permission groups"),
    (RBAC_ASSIGNMENTS_MANAGE, "Assign groups and permissions"),
    (AUDIT_LOGS_READ, "Read audit logs"),
    (NOTIFICATIONS_SEND, "Send notifications"),
    (HR_EMPLOYEES_READ, "List employees"),
    (HR_EMPLOYEES_MANAGE, "Manage employees"),
    (HR_ABSENCES_REQUEST, "Request absences"),
    (HR_ABSENCES_READ, "List absences"),
    (HR_ABSENCES_APPROVE, "Approve absences"),
    (HR_VACATIONS_MANAGE, "Manage vacation periods"),
    (HR_PAYROLLS_READ, "Read payrolls"),
    (HR_PAYROLLS_MANAGE, "Calculate payrolls"),
    (HR_PAYROLLS_APPROVE, "Approve and pay payrolls"),
    (HR_DEDUCTIONS_MANAGE, "Manage deductions, bonuses and overtime"),
    (FINANCE_ENTRIES_READ, "List finance entries"),
    (FINANCE_ENTRIES_MANAGE, "Manage finance entries"),
    (FINANCE_ENTRIES_PAY, "Register payments"),
    (FINANCE_LOANS_MANAGE, "Manage loans"),
    (FINANCE_SETUP_MANAGE, "Manage categories, cost centers and bank accounts"),
    (FINANCE_EXPORT, "Export accounting data"),
    (STOCK_LOCATIONS_READ, "List warehouses, zones and bins"),
    (STOCK_LOCATIONS_MANAGE, "Manage warehouses, zones and bins"),
    (STOCK_ITEMS_READ, "List items"),
    (STOCK_ITEMS_MANAGE, "Register item movements"),
    (STOCK_VARIANTS_MANAGE, "Manage variants"),
    (STOCK_VOLUMES_MANAGE, "Manage volumes"),
    (SALES_CUSTOMERS_READ, "List customers"),
    (SALES_CUSTOMERS_MANAGE, "Manage customers"),
    (SALES_ORDERS_READ, "List sales orders"),
    (SALES_ORDERS_MANAGE, "Manage sales orders"),
    (SALES_PROMOTIONS_MANAGE, "Manage variant promotions"),
    (REQUESTS_CREATE, "Open requests"),
    (REQUESTS_VIEW_ALL, "View every request"),
    (REQUESTS_MANAGE, "Manage requests"),
    (STORAGE_FILES_UPLOAD, "Upload files"),
]
