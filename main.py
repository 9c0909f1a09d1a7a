"""
日记应用主入口
启动FastAPI应用，提供注册登录、日记、点赞和评论接口
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from diary_app.api import auth_routes, diary_routes
from diary_app.utils.config import settings
from diary_app.utils.errors import DiaryAppError
from diary_app.utils.logger import logger

# 创建FastAPI应用
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    debug=settings.debug
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes.router)
app.include_router(diary_routes.router)


@app.exception_handler(DiaryAppError)
async def diary_app_error_handler(request: Request, exc: DiaryAppError):
    """业务异常统一转换为响应"""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} 失败: {exc.msg}")
    else:
        logger.info(f"{request.method} {request.url.path} 被拒绝: {exc.msg}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.status_code, "msg": exc.msg}
    )


@app.on_event("startup")
async def startup_event():
    """应用启动时执行"""
    logger.info(f"{settings.app_name} v{settings.app_version} 启动成功")
    logger.info(f"数据服务地址: {settings.store_base_url}, 点赞策略: {settings.like_strategy}")


@app.on_event("shutdown")
async def shutdown_event():
    """应用关闭时执行"""
    logger.info(f"{settings.app_name} 已关闭")


@app.get("/")
async def root():
    """根路径，返回应用信息"""
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """健康检查接口"""
    return {"status": "healthy", "code": 0}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"启动服务器: {settings.host}:{settings.port}")
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
