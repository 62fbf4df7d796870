from .models.filter_type import FilterType
from .models.adjustments import AdjustmentParameters
from .services.image_editor_service import ImageEditor

__all__ = ["ImageEditor", "FilterType", "AdjustmentParameters"]
