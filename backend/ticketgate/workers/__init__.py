"""
Background workers, each an independent periodic task with its own store handles.
"""

from .periodic import PeriodicWorker
from .admission_loop import AdmissionLoop, constant_rate
from .seat_release_sweeper import SeatReleaseSweeper

__all__ = ['PeriodicWorker', 'AdmissionLoop', 'constant_rate', 'SeatReleaseSweeper']
