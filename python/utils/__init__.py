# Utils package
from .geometry import compute_crop_rect, compute_margins
from .files import read_upload, sanitize_filename, validate_upload

__all__ = ['compute_crop_rect', 'compute_margins', 'read_upload', 'sanitize_filename', 'validate_upload']
