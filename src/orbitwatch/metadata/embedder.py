"""PNG metadata embedding and extraction for pass charts."""

from typing import Dict, Optional

from PIL import Image, PngImagePlugin

from ..models.observer import Observer
from ..models.passes import Pass


def embed_metadata(
    image: Image.Image,
    observer: Observer,
    output_path: str,
    pass_: Optional[Pass] = None,
    extra: Optional[Dict[str, str]] = None,
) -> None:
    """Save a chart as PNG with observer and pass details in text chunks.

    Args:
        image: Rendered chart
        observer: Observer the chart was computed for
        output_path: Path where to save the PNG file
        pass_: Optional pass drawn on the chart
        extra: Additional key/value pairs to store
    """
    if image.mode != "RGB":
        raise ValueError("Chart image must be RGB")

    png_info = PngImagePlugin.PngInfo()

    metadata_dict = _observer_to_metadata_dict(observer)
    if pass_ is not None:
        metadata_dict.update(_pass_to_metadata_dict(pass_))
    if extra:
        metadata_dict.update(extra)

    for key, value in metadata_dict.items():
        png_info.add_text(key, str(value))

    image.save(output_path, "PNG", pnginfo=png_info)


def _observer_to_metadata_dict(observer: Observer) -> Dict[str, str]:
    return {
        "latitude": str(observer.latitude),
        "longitude": str(observer.longitude),
        "altitude_km": str(observer.altitude_km),
    }


def _pass_to_metadata_dict(pass_: Pass) -> Dict[str, str]:
    """Convert a Pass to string key/values for PNG text chunks."""
    return {
        "rise_time": pass_.rise_time.isoformat(),
        "max_el_time": pass_.max_el_time.isoformat(),
        "set_time": pass_.set_time.isoformat(),
        "max_el": f"{pass_.max_el:.2f}",
        "rise_az": f"{pass_.rise_az:.2f}",
        "set_az": f"{pass_.set_az:.2f}",
        "duration_s": f"{pass_.duration:.0f}",
    }


def extract_metadata(image_path: str) -> Optional[Dict[str, str]]:
    """Extract metadata from a PNG file.

    Args:
        image_path: Path to PNG file

    Returns:
        Dictionary of metadata key-value pairs, or None if no metadata found
    """
    try:
        image = Image.open(image_path)
    except FileNotFoundError:
        return None

    metadata = {}
    if hasattr(image, "text"):
        for key, value in image.text.items():
            metadata[key] = value

    return metadata if metadata else None
