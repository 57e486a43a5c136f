import logging

from fastapi import APIRouter
from sqlalchemy.exc import SQLAlchemyError

from storefront.db.database import db
from storefront.errors import ErrorType
from storefront.exceptions import AppException
from storefront.schemas.catalog import SetupResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["setup"])


@router.post("/setup-db", response_model=SetupResponse)
async def setup_db():
    """Create the catalog schema. Existing tables are left untouched."""
    try:
        tables = await db.create_schema()
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database setup error: {e}")
        raise AppException(ErrorType.STORE_UNAVAILABLE, "Failed to set up database")

    logger.info(f"Schema ready: {tables}")
    return SetupResponse(success=True, message="Database schema created successfully", tables=tables)
