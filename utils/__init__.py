# Utility modules for the household app
from .url_validator import is_safe_url, safe_fetch, SSRFError
from .sanitizer import (
    clean_text, sanitize_url, sanitize_recipe_name, sanitize_ingredient_text
)
