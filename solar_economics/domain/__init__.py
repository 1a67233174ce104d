"""
Domain entities: installation, contract, battery and consumption.
"""

from .installation import (
    Obstacle,
    PanelGroup,
    FetchParameters,
    RawYieldSample,
    GroupRawYield,
    SolarInstallation,
)
from .contract import CompanyOffer
from .battery import Battery
from .consumption import (
    ConsumptionRecord,
    merge_consumption,
    consumption_statistics,
    load_consumption_csv,
)

__all__ = [
    'Obstacle',
    'PanelGroup',
    'FetchParameters',
    'RawYieldSample',
    'GroupRawYield',
    'SolarInstallation',
    'CompanyOffer',
    'Battery',
    'ConsumptionRecord',
    'merge_consumption',
    'consumption_statistics',
    'load_consumption_csv',
]
