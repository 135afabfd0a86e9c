# SmartGuard: emergency persona avatars, nearby services and consultation advice.

__version__ = "0.3.0"
