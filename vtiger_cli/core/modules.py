"""
Static module table.

Maps the closed set of logical module keys to the numeric id used in record
references and to the element type name the web service expects.
"""

from types import MappingProxyType
from typing import Any

from vtiger_cli.core.client import UnknownModuleError
from vtiger_cli.core.types import ModuleInfo, VtigerModule

M = VtigerModule

# calendar and helpdesk both map to 9 on the remote schema
MODULES = MappingProxyType(
    {
        M.CALENDAR: ModuleInfo(M.CALENDAR, 9, "Calendar"),
        M.LEADS: ModuleInfo(M.LEADS, 2, "Leads"),
        M.ACCOUNTS: ModuleInfo(M.ACCOUNTS, 3, "Accounts"),
        M.CONTACTS: ModuleInfo(M.CONTACTS, 4, "Contacts"),
        M.POTENTIALS: ModuleInfo(M.POTENTIALS, 5, "Potentials"),
        M.PRODUCTS: ModuleInfo(M.PRODUCTS, 6, "Products"),
        M.DOCUMENTS: ModuleInfo(M.DOCUMENTS, 7, "Documents"),
        M.EMAILS: ModuleInfo(M.EMAILS, 8, "Emails"),
        M.HELPDESK: ModuleInfo(M.HELPDESK, 9, "HelpDesk"),
        M.FAQ: ModuleInfo(M.FAQ, 10, "Faq"),
        M.VENDORS: ModuleInfo(M.VENDORS, 11, "Vendors"),
        M.PRICEBOOKS: ModuleInfo(M.PRICEBOOKS, 12, "PriceBooks"),
        M.QUOTES: ModuleInfo(M.QUOTES, 13, "Quotes"),
        M.PURCHASEORDER: ModuleInfo(M.PURCHASEORDER, 14, "PurchaseOrder"),
        M.SALESORDER: ModuleInfo(M.SALESORDER, 15, "SalesOrder"),
        M.INVOICE: ModuleInfo(M.INVOICE, 16, "Invoice"),
        M.CAMPAIGNS: ModuleInfo(M.CAMPAIGNS, 17, "Campaigns"),
        M.EVENTS: ModuleInfo(M.EVENTS, 18, "Events"),
        M.USERS: ModuleInfo(M.USERS, 19, "Users"),
        M.GROUPS: ModuleInfo(M.GROUPS, 20, "Groups"),
        M.CURRENCY: ModuleInfo(M.CURRENCY, 21, "Currency"),
        M.DOCUMENTFOLDERS: ModuleInfo(M.DOCUMENTFOLDERS, 22, "DocumentFolders"),
    }
)


def module_info(key: Any) -> ModuleInfo | None:
    """Look up a module row, or None for keys outside the table."""
    if not isinstance(key, str):
        return None
    try:
        return MODULES.get(VtigerModule(key))
    except ValueError:
        return None


def module_id(key: Any) -> int | None:
    """Numeric module id for a key, or None if the key is unknown."""
    info = module_info(key)
    return info.id if info else None


def module_name(key: Any) -> str | None:
    """Element type name for a key, or None if the key is unknown."""
    info = module_info(key)
    return info.name if info else None


def all_modules() -> list[ModuleInfo]:
    """All module rows in table order."""
    return list(MODULES.values())


def require_module_name(key: Any) -> str:
    """Element type name for a key, raising UnknownModuleError if unknown."""
    name = module_name(key)
    if name is None:
        raise UnknownModuleError(key)
    return name


def record_ref(key: Any, record_number: int | str) -> str:
    """
    Build the `{moduleId}x{recordNumber}` reference the web service uses.

    Raises:
        UnknownModuleError: If the key is not in the module table

    """
    mod_id = module_id(key)
    if mod_id is None:
        raise UnknownModuleError(key)
    return f"{mod_id}x{record_number}"
