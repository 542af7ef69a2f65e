from fastapi import APIRouter
from fastapi.responses import JSONResponse
import logging

from coursegraph.core.config import settings
from coursegraph.core.redis import redis_manager
from coursegraph.core.database import database_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["健康检查"])


@router.get("")
async def health_check():
    """基础健康检查接口"""
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@router.get("/database")
async def database_health():
    """数据库和缓存连接健康检查"""
    health_status = {
        "postgresql": False,
        "redis": False,
        "overall": False,
        "details": {}
    }

    # 测试PostgreSQL连接
    pg_status = await database_service.health_check()
    health_status["postgresql"] = pg_status["status"] == "healthy"
    health_status["details"]["postgresql"] = pg_status["message"]

    # 测试Redis连接
    if redis_manager.redis_pool:
        health_status["redis"] = await redis_manager.ping()
        health_status["details"]["redis"] = "连接正常" if health_status["redis"] else "连接失败"
    else:
        health_status["details"]["redis"] = "连接池未初始化"

    # 课程数据依赖数据库，缓存不可用时仍可服务
    health_status["overall"] = health_status["postgresql"]

    if not health_status["overall"]:
        logger.warning("数据库连接检查失败", extra={"details": health_status["details"]})
        return JSONResponse(status_code=503, content=health_status)

    if not health_status["redis"]:
        logger.warning("Redis不可用，课程缓存降级为直接查询")

    return health_status
