"""
Geometry utilities for face cropping.
"""

from models.domain.face import BoundingBox


def compute_margins(box: BoundingBox, horizontal: float, vertical: float) -> tuple:
    """
    Asymmetric margins: horizontal is a fraction of the box width,
    vertical a fraction of the box height.

    Returns:
        (margin_x, margin_y) in pixels
    """
    return int(round(box.width * horizontal)), int(round(box.height * vertical))


def compute_crop_rect(
    box: BoundingBox,
    img_width: int,
    img_height: int,
    horizontal: float = 0.2,
    vertical: float = 0.3,
) -> BoundingBox:
    """
    Expand a face box by its margins and clamp the result to the raster.

    The rectangle is the intersection of the expanded box with
    [0, img_width) x [0, img_height), so it is always fully inside the image.

    Example:
        box {10,10,100,100}, margins (20,30), raster 150x150 -> {0,0,130,140}

    Args:
        box: Face bounding box (pixels)
        img_width: Raster width
        img_height: Raster height
        horizontal: Horizontal margin fraction of box width
        vertical: Vertical margin fraction of box height

    Returns:
        Crop rectangle as a BoundingBox (confidence carried over)
    """
    margin_x, margin_y = compute_margins(box, horizontal, vertical)

    crop_x1 = min(max(0, box.x - margin_x), img_width)
    crop_y1 = min(max(0, box.y - margin_y), img_height)
    # Far edge clamps at box edge + margin, not at x1 + (w + 2*margin)
    crop_x2 = max(crop_x1, min(img_width, box.x2 + margin_x))
    crop_y2 = max(crop_y1, min(img_height, box.y2 + margin_y))

    return BoundingBox.from_xyxy(crop_x1, crop_y1, crop_x2, crop_y2, confidence=box.confidence)
