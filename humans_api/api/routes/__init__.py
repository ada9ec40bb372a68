"""API route handlers for the CRM."""

from humans_api.api.routes import front as front
from humans_api.api.routes import health as health
