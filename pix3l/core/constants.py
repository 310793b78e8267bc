# Fixed processing constants shared by the transformation library
PROCESSING_CONSTANTS = {
    "gamma_tolerance": 0.01,  # |gamma - 1.0| at or below this counts as identity
    "blur_min_radius": 1,
    "blur_max_radius": 10,
    "blur_log_pixels": 4_000_000,  # Blur calls above this size are logged
    "suggestion_blur_max": 100,  # Upper bound applied to suggested blur radii
    "watermark_font_size": 20,
    "watermark_text_alpha": 128,  # ~50% white
    "watermark_image_opacity": 0.5,
    "preview_max_dimension": 1920,
    "jpeg_default_quality": 90,
}

# Luminance thresholds (0-255) used to count tail pixels
DARK_PIXEL_THRESHOLD = 64
BRIGHT_PIXEL_THRESHOLD = 192

SEPIA_MATRIX = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)

SHARPEN_KERNEL = ((0, -1, 0), (-1, 5, -1), (0, -1, 0))
SOBEL_X = ((-1, 0, 1), (-2, 0, 2), (-1, 0, 1))
SOBEL_Y = ((-1, -2, -1), (0, 0, 0), (1, 2, 1))
