"""
visual_property_search — Find property listings by photo similarity.

Fingerprints listing photos with a perceptual hash, a dominant color
palette and aspect ratio, then ranks properties by a weighted composite
similarity to a query image, one best-matching photo per property.

Modules:
    engine           SearchEngine (query-side search) and upload validation
    index_builder    IndexingPipeline (populates the feature store)
    features         ImageFeatures and feature extraction from bytes
    perceptual_hash  64-bit block-mean perceptual hash + Hamming similarity
    color_palette    Quantized dominant colors + palette similarity
    geometry         Aspect ratio and brightness
    scoring          Weighted composite score, explanations, ranking
    preprocessing    Image decoding and resampling
    collaborators    Repository / feature store / fetcher interfaces
    models           Filter, result and outcome shapes
"""

from .engine import SearchEngine, validate_upload
from .exceptions import FetchError, ImageProcessingError, ValidationError
from .features import ImageFeatures, extract_image_features
from .index_builder import IndexingPipeline
from .models import SearchFilter

__version__ = "1.0.0"

__all__ = [
    "SearchEngine",
    "IndexingPipeline",
    "ImageFeatures",
    "SearchFilter",
    "extract_image_features",
    "validate_upload",
    "ValidationError",
    "ImageProcessingError",
    "FetchError",
]
