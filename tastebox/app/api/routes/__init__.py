import importlib

from fastapi import APIRouter

from tastebox.app.api.routes import auth, nutrition, recipes, tags, users

import_routes = importlib.import_module("tastebox.app.api.routes.import")

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(recipes.router)
api_router.include_router(tags.router)
api_router.include_router(nutrition.router)
api_router.include_router(import_routes.router)
