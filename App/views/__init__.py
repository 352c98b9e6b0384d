from .api import api

# All blueprints to be registered
views = [
    api,    # JSON API consumed by the Next.js front end and availability_grid
]
