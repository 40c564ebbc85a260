"""
Range-bound operations integration layer
"""

from .authority import OPEN_POLICY, OpenPolicy, Policy, RolePolicy
from .heart import Heart
from .operator import Operator
from .price_oracle import PriceOracle
from .runtime import Host, ManualClock, SystemClock
from .settings import Settings, configure_logging, load_settings
from .system import RangeSystem, build_system

__all__ = [
    "OPEN_POLICY",
    "OpenPolicy",
    "Policy",
    "RolePolicy",
    "Heart",
    "Operator",
    "PriceOracle",
    "Host",
    "ManualClock",
    "SystemClock",
    "Settings",
    "configure_logging",
    "load_settings",
    "RangeSystem",
    "build_system",
]
