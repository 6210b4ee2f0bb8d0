"""
Cross-Stack References - Producer/Consumer Units
Every unit is its own stack: UserService, OrderService,
ConfigBasedUserService and ConfigBasedOrderService
"""
import pulumi
from config import get_config
from src.composition import build_app

# Configuration
config = get_config()

# 1. Define every unit (handles and names are wired here)
app = build_app(config)

# 2. Deploy the unit this stack is named after
unit = app.deploy(pulumi.get_stack())
