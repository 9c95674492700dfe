"""Holdings services for the protocols where xSTRK is tracked."""

# Import all services to trigger auto-registration
from endur_holdings.protocols.base import BaseHoldingsService
from endur_holdings.protocols.ekubo import EkuboHoldingsService
from endur_holdings.protocols.lst import LSTHoldingsService
from endur_holdings.protocols.nostra import NostraDexHoldingsService, NostraLendingHoldingsService
from endur_holdings.protocols.opus import OpusHoldingsService
from endur_holdings.protocols.strkfarm import STRKFarmEkuboHoldingsService, STRKFarmSenseiHoldingsService
from endur_holdings.protocols.vesu import VesuHoldingsService

__all__ = [
    "BaseHoldingsService",
    "EkuboHoldingsService",
    "LSTHoldingsService",
    "NostraDexHoldingsService",
    "NostraLendingHoldingsService",
    "OpusHoldingsService",
    "STRKFarmEkuboHoldingsService",
    "STRKFarmSenseiHoldingsService",
    "VesuHoldingsService",
]
