import sys

import numpy as np
from svgpathtools import parse_path
from svgpathtools.parser import parse_transform
from svgpathtools.path import transform


def collect_transforms(element):
    """Return the composed transform string for an element.

    Walks from the element up to the document root, recording every
    non-empty transform attribute. The outermost transform comes first.
    """
    chain = []
    current = element
    while current is not None:
        value = (current.get('transform') or '').strip()
        if value:
            chain.append(value)
        current = current.getparent()

    chain.reverse()
    return ' '.join(chain)


def parse_path_with_moveto(d):
    """Parse path data, keeping the current point of a move-only path.

    svgpathtools drops a moveto that is not followed by a drawing command,
    so a zero-length lineto is appended to pin that point.
    """
    path = parse_path(d)
    if len(path) == 0:
        path = parse_path(d + ' l 0 0')
    return path


def compute_path_bbox(d, transform_str=''):
    """Compute the axis-aligned bounding box of path data.

    Returns (min_x, min_y, max_x, max_y), or None when the path draws
    nothing or its bounds are not finite. Parse and geometry errors are
    raised to the caller.
    """
    if not d:
        return None

    # parse_path resolves relative commands to absolute coordinates
    path = parse_path_with_moveto(d)
    if len(path) == 0:
        return None

    if transform_str:
        # Functions compose left to right, so the outermost ancestor applies last
        path = transform(path, parse_transform(transform_str))

    xmin, xmax, ymin, ymax = path.bbox()
    bbox = (float(xmin), float(ymin), float(xmax), float(ymax))
    if not np.all(np.isfinite(bbox)):
        return None

    return bbox


def calculate_document_bbox(path_elements, target):
    """Union the bounding boxes of all path elements.

    Returns (min_x, min_y, max_x, max_y), or None when no path contributed.
    """
    min_x, min_y = float('inf'), float('inf')
    max_x, max_y = float('-inf'), float('-inf')
    processed = 0

    for element in path_elements:
        d = element.get('d')
        if not d:
            continue

        try:
            bbox = compute_path_bbox(d, collect_transforms(element))
        except Exception as e:
            print(f"Unable to compute bounds for a path in {target}: {e}", file=sys.stderr)
            continue

        if bbox is None:
            continue

        x1, y1, x2, y2 = bbox
        processed += 1
        min_x = min(min_x, x1)
        min_y = min(min_y, y1)
        max_x = max(max_x, x2)
        max_y = max(max_y, y2)

    if not processed:
        return None

    return min_x, min_y, max_x, max_y
