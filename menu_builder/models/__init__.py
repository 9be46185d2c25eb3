from menu_builder.models.user import User
from menu_builder.models.company import Company
from menu_builder.models.menu_item import MenuItem
