"""cloudbot: price-aware multi-cloud scenario deployment over Terraform."""

__version__ = "0.1.0"
