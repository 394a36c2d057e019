"""
Root Module

The blueprints the application is built from, mounted under the global
route prefix when the application is finalized. Feature modules (students,
users, auth) add their blueprints here; the ORM entity set lives in
config.ENTITIES.
"""

from dataclasses import dataclass
from typing import Tuple

from flask import Blueprint, Flask

from .routes import health_bp


@dataclass(frozen=True)
class AppModule:
    blueprints: Tuple[Blueprint, ...] = (health_bp,)

    def mount(self, app: Flask, prefix: str) -> None:
        prefix = prefix.strip("/")
        for bp in self.blueprints:
            app.register_blueprint(bp, url_prefix=f"/{prefix}" if prefix else None)
