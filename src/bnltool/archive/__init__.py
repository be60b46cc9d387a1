"""Archive layer: binary records, addressing, layout and the container."""

from .constants import HEADER_SIZE, SECTION_ORDER
from .container import BNLFile, ResourceOverlap
from .dataview import DataView, DataViewList
from .errors import *  # noqa: F401,F403
from .errors import __all__ as _errors_all
from .planner import ArchivePlan, AssetPlan, SectionPlan, plan_archive
from .raw_asset import RawAsset
from .records import AssetDescription, AssetMetadata, BnlHeader, RecordLayout
from .resource import VirtualResource
from .types import AssetType, known_type, type_label
from .writer import write_archive

__all__ = [
    "HEADER_SIZE",
    "SECTION_ORDER",
    "BNLFile",
    "ResourceOverlap",
    "DataView",
    "DataViewList",
    "ArchivePlan",
    "AssetPlan",
    "SectionPlan",
    "plan_archive",
    "RawAsset",
    "AssetDescription",
    "AssetMetadata",
    "BnlHeader",
    "RecordLayout",
    "VirtualResource",
    "AssetType",
    "known_type",
    "type_label",
    "write_archive",
    *_errors_all,
]
