# Overview: Static role -> resource -> actions table.

from enum import Enum


class Role(str, Enum):
    MANAGER = "manager"
    CASHIER = "cashier"


class Resource(str, Enum):
    EMPLOYEE = "employee"
    CATEGORY = "category"
    PRODUCT = "product"
    STORE_PRODUCT = "store_product"
    CUSTOMER_CARD = "customer_card"
    CHECK = "check"
    SALE = "sale"
    REPORT = "report"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


CRUD = frozenset(Action)


# -- MANAGER --
# Runs the store: staff, catalog, stock and loyalty programme. Reads and
# administratively deletes receipts but never rings up a sale.

MANAGER_PERMISSIONS = {
    Resource.EMPLOYEE: CRUD,
    Resource.CATEGORY: CRUD,
    Resource.PRODUCT: CRUD,
    Resource.STORE_PRODUCT: CRUD,
    Resource.CUSTOMER_CARD: CRUD,
    Resource.CHECK: frozenset({Action.READ, Action.DELETE}),
    Resource.SALE: frozenset({Action.READ}),
    Resource.REPORT: frozenset({Action.READ}),
}


# -- CASHIER --
# Sells: creates receipts, registers and edits loyalty cards, looks up stock.

CASHIER_PERMISSIONS = {
    Resource.CUSTOMER_CARD: frozenset({Action.CREATE, Action.READ, Action.UPDATE}),
    Resource.CHECK: frozenset({Action.CREATE, Action.READ}),
    Resource.SALE: frozenset({Action.CREATE, Action.READ}),
    Resource.PRODUCT: frozenset({Action.READ}),
    Resource.STORE_PRODUCT: frozenset({Action.READ}),
    Resource.CATEGORY: frozenset({Action.READ}),
}


ROLE_PERMISSIONS: dict[Role, dict[Resource, frozenset]] = {
    Role.MANAGER: MANAGER_PERMISSIONS,
    Role.CASHIER: CASHIER_PERMISSIONS,
}
