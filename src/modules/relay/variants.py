import re

# Suffixes from one provider's historical naming scheme. Kept as-is for
# compatibility with clients that still send the old names; likely stale.
VARIANT_SUFFIXES = ("-32768", "-8192", "-16384", "-instruct-v0.1")

_STRIP_SUFFIX = re.compile(r"-32768|-8192|-16384|-instruct-v0\.1$", re.IGNORECASE)


def model_variants(model: str) -> list[str]:
    """Candidate names to try after `model` is rejected as not found."""
    variants = [f"{model}{suffix}" for suffix in VARIANT_SUFFIXES]
    variants.append(_STRIP_SUFFIX.sub("", model, count=1))
    return variants
