from stockpos.app import app

"""
Entry point:  uvicorn run:app --reload
"""

__all__ = ["app"]
