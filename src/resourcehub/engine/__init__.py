"""ResourceHub Engine - allocation rules, over-allocation detection and capacity heat maps."""

from .heatmap import HeatLevel, HeatmapData, build_heatmap
from .overallocation import OverAllocationDetector, OverAllocationSeverity, OverAllocationWarning
from .records import AllocationRecord, AllocationStatus, CapacityRecord, EmployeeRecord
from .result import Err, ErrorKind, Ok, Result

__all__ = [
    "HeatLevel",
    "HeatmapData",
    "build_heatmap",
    "OverAllocationDetector",
    "OverAllocationSeverity",
    "OverAllocationWarning",
    "AllocationRecord",
    "AllocationStatus",
    "CapacityRecord",
    "EmployeeRecord",
    "Err",
    "ErrorKind",
    "Ok",
    "Result",
]
