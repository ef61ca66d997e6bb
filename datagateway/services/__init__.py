"""
Service layer for business logic
"""
from datagateway.services.gateway_service import GatewayService, get_gateway
from datagateway.services.nlq_service import NlqService, get_nlq_service

__all__ = [
    "GatewayService",
    "get_gateway",
    "NlqService",
    "get_nlq_service",
]
