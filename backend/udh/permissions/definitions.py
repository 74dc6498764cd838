# Overview: Capability definitions.
# Each capability is defined as: (code, name, description)

ADD = "add"
EDIT = "edit"
DELETE = "delete"
REPORTS = "reports"
LIMITS = "limits"
BACKUP = "backup"
PRINT = "print"
ADD_NEW = "addNew"


CAPABILITY_DEFINITIONS = [
    (ADD, "Add Transactions", "Record new transactions, customers and dealers"),
    (EDIT, "Edit Transactions", "Change existing transactions, customers and dealers"),
    (DELETE, "Delete Transactions", "Remove transactions, customers and dealers"),
    (REPORTS, "View Reports", "Export sales, inventory and customer reports"),
    (LIMITS, "Stock Limits", "Manage the catalog and low-stock limits"),
    (BACKUP, "Backup Data", "Export and restore JSON backups"),
    (ADD_NEW, "Add New Users", "Create user accounts"),
    (PRINT, "Print Bills", "Print bills and invoices"),
]
