# Utility modules for CMV Control
from .sanitizer import sanitize_text, sanitize_name, sanitize_color
