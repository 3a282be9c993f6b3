"""Digital signage server.

A small content system for lobby displays featuring:
- Image library and named slideshows (image lists)
- Global display settings with a weather/time sidebar and event ticker
- JWT-protected admin API and web UI
- Public display page and a headless display player
"""

__version__ = "1.0.0"
