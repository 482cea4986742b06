from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.routes import search_router, icp_router
from src.cache import CacheConfig, ProviderResultCache, RedisSearchResultCache, SearchResultCache
from src.cache.config import get_redis_client
from src.database.connection import create_tables
from src.search.extractor import OpenAIQueryExtractor
from src.search.interpreter import QueryInterpreter
from src.search.provider import PeopleSearchClient, ResultFetcher
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lead Search API",
    version="1.0.0",
    description="Natural-language lead search with fallback broadening and learned ranking"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        os.getenv("FRONTEND_URL", "")
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    """Initialize database, caches and clients on startup"""
    try:
        create_tables()
        logger.info("Database tables created successfully")

        redis_client = get_redis_client()
        if redis_client:
            app.state.search_cache = RedisSearchResultCache(redis_client)
            logger.info("Search cache backed by Redis")
        else:
            app.state.search_cache = SearchResultCache()
            app.state.search_cache.start_sweeper(CacheConfig.SEARCH_CACHE_SWEEP_INTERVAL)
            logger.warning("Redis not available - using in-process search cache")

        app.state.provider_cache = ProviderResultCache()
        app.state.people_client = PeopleSearchClient()
        await app.state.people_client.start_session()
        app.state.fetcher = ResultFetcher(app.state.people_client, app.state.provider_cache)
        app.state.interpreter = QueryInterpreter(OpenAIQueryExtractor())

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

@app.on_event("shutdown")
async def shutdown_event():
    """Stop background work and close clients"""
    search_cache = getattr(app.state, "search_cache", None)
    if isinstance(search_cache, SearchResultCache):
        await search_cache.stop_sweeper()

    people_client = getattr(app.state, "people_client", None)
    if people_client:
        await people_client.close_session()

# Include routers
app.include_router(search_router)
app.include_router(icp_router)

@app.get("/")
def root():
    return {
        "message": "Lead Search API",
        "version": "1.0.0",
        "status": "running",
        "description": "Natural-language lead search"
    }

@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    search_cache = getattr(app.state, "search_cache", None)
    redis_backed = isinstance(search_cache, RedisSearchResultCache)

    return {
        "status": "healthy",
        "cache": search_cache.health_check() if redis_backed else {"status": "in-process"},
        "version": "1.0.0",
        "features": {
            "ai_search": True,
            "icp_scoring": True,
            "redis_cache": redis_backed
        }
    }
