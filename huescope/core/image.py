"""Image loading: decode with Pillow, downsample, flatten to RGBA bytes."""

from PIL import Image

from huescope.core.types import ImageSample

DEFAULT_MAX_SIZE = 256


def _fit(width: int, height: int, max_size: int) -> tuple[int, int]:
    """Scale (width, height) so neither side exceeds max_size. Aspect ratio kept."""
    if width <= max_size and height <= max_size:
        return width, height
    ratio = min(max_size / width, max_size / height)
    return max(1, round(width * ratio)), max(1, round(height * ratio))


def sample_image(image: Image.Image, path: str = '', max_size: int = DEFAULT_MAX_SIZE) -> ImageSample:
    """Downsample an already-open image (nearest neighbour) into an ImageSample."""
    if max_size < 1:
        raise ValueError(f'max_size must be >= 1, got {max_size}')
    rgba = image.convert('RGBA')
    width, height = _fit(rgba.width, rgba.height, max_size)
    if (width, height) != rgba.size:
        rgba = rgba.resize((width, height), Image.Resampling.NEAREST)
    return ImageSample(
        path=path,
        pixels=rgba.tobytes(),
        width=width,
        height=height,
        original_width=image.width,
        original_height=image.height,
    )


def load_image_sample(path: str, max_size: int = DEFAULT_MAX_SIZE) -> ImageSample:
    """Open an image file and downsample it for analysis."""
    with Image.open(path) as image:
        return sample_image(image, path=path, max_size=max_size)
