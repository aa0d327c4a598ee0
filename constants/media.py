"""
Media Constants

Image limits and the public URL prefix images are served under by the
static file layer.
"""

# Public URL prefix for stored recipe images
IMAGE_URL_PREFIX = '/uploads/images/'

# Maximum stored image size (10MB)
MAX_IMAGE_SIZE = 10 * 1024 * 1024
