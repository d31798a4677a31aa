"""
Trackmate REST API Module

Endpoints:
- GET  /tracks, POST /tracks, GET /tracks/{id}
- GET  /cars, POST /cars
- GET  /laps, POST /laps, POST /laps/quick-session, PATCH /laps/{id}
- GET  /leaderboards, GET /drivers, GET /drivers/{id}
- GET  /profile, PUT /profile
- GET  /timing/deep-link
- POST /api/phone-sessions

Usage:
    uvicorn trackmate.api.main:create_app --factory --host 0.0.0.0 --port 8000
"""

from .main import create_app

__all__ = ['create_app']
