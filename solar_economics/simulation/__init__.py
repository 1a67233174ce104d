"""
Simulation module.

- BatteryDispatcher: greedy hourly battery state machine
- calculate_bill: monthly bill with virtual battery credit
- SimulationOrchestrator: one offer x battery run with billing convergence
- run_comparison: all combinations in parallel, ranked by annual cost
"""

from .battery_dispatch import BatteryDispatcher, DispatchOutcome
from .bill_calculator import BillResult, calculate_bill
from .orchestrator import SimulationOrchestrator, HourlyResult
from .simulation_results import SimulationResult, MonthlyBreakdown, NO_BATTERY
from .comparison import run_comparison, payback_years, SimulationError

__all__ = [
    'BatteryDispatcher',
    'DispatchOutcome',
    'BillResult',
    'calculate_bill',
    'SimulationOrchestrator',
    'HourlyResult',
    'SimulationResult',
    'MonthlyBreakdown',
    'NO_BATTERY',
    'run_comparison',
    'payback_years',
    'SimulationError',
]
