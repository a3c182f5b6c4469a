from .adapter import FaceAnalyzer

__all__ = ["FaceAnalyzer"]
