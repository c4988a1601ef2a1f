"""Health probe resources.

Usage
-----
Import health resources for route registration::

    from niabridge.api.health.resources import HealthResource, ReadyResource
"""
