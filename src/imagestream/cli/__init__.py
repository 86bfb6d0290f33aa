"""imagestream.cli package - re-export CLI commands from app.py"""
from .app import app, run, config_validate, init

__all__ = ['app', 'run', 'config_validate', 'init']
