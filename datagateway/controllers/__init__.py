"""
Controllers
HTTP routes, one module per resource
"""
from datagateway.controllers import auth_controller
from datagateway.controllers import organizations_controller
from datagateway.controllers import datasources_controller

__all__ = [
    "auth_controller",
    "organizations_controller",
    "datasources_controller",
]
