"""
[V5.0] HTTP 服务层 (FastAPI)
- GET  /commits                 服务端渲染的提交动态页面
- GET/POST/DELETE /api/updates/comments   提交评论 JSON 接口
"""
import logging
from typing import Optional

from fastapi import FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, Field

from config import GlobalConfig
from context import resolve_feed_context
from data_sources.base import CommitSource
from data_sources.factory import get_commit_source
from feed_composer import CommitFeedComposer
from kv_store.base import KeyValueStore
from kv_store.factory import get_store
import page_builder
import update_comments
from update_comments import CommentError

logger = logging.getLogger(__name__)


class CommentCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    commit_sha: str = Field(alias="commitSha", min_length=1)
    wallet_address: str = Field(alias="walletAddress", min_length=1)
    username: str = Field(min_length=1)
    content: str = Field(min_length=1)
    parent_id: Optional[str] = Field(default=None, alias="parentId")


class CommentDeleteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    comment_id: str = Field(alias="commentId", min_length=1)
    wallet_address: str = Field(alias="walletAddress", min_length=1)


def _error(message: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    global_config: Optional[GlobalConfig] = None,
    commit_source: Optional[CommitSource] = None,
    store: Optional[KeyValueStore] = None,
) -> FastAPI:
    """
    创建并配置 FastAPI 应用。
    未传入的依赖按 GlobalConfig 通过工厂创建 (测试中可注入替身)。
    """
    global_config = global_config or GlobalConfig()
    if commit_source is None:
        commit_source = get_commit_source(global_config)
    if store is None:
        store = get_store(global_config)
    composer = CommitFeedComposer(global_config, commit_source, store)
    revalidate = global_config.COMMITS_REVALIDATE_SECONDS

    app = FastAPI(title=global_config.SITE_TITLE, version="5.0.0")
    app.state.global_config = global_config
    app.state.composer = composer
    app.state.store = store

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        fields = sorted({str(err["loc"][-1]) for err in exc.errors() if err.get("loc")})
        message = f"Invalid request: {', '.join(fields)}" if fields else "Invalid request"
        return _error(message)

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    @app.get("/")
    def index():
        return RedirectResponse(url="/commits")

    @app.get("/commits", response_class=HTMLResponse)
    def commits_page(
        category: Optional[str] = Query(default=None),
        hideStats: Optional[str] = Query(default=None),
    ):
        context = resolve_feed_context(category, hideStats, global_config)
        page = composer.compose(context)
        html_content = page_builder.generate_html_page(page, global_config)
        return HTMLResponse(
            content=html_content,
            headers={
                "Cache-Control": f"public, s-maxage={revalidate}, stale-while-revalidate"
            },
        )

    @app.get("/api/updates/comments")
    def list_comments(
        commitSha: Optional[str] = Query(default=None),
        limit: Optional[str] = Query(default=None),
    ):
        if not commitSha:
            return _error("commitSha parameter is required")

        try:
            size = int(limit) if limit else global_config.COMMENTS_DEFAULT_LIMIT
        except ValueError:
            return _error("limit must be an integer")
        size = min(max(size, 0), global_config.COMMENTS_MAX_LIMIT)

        comments = update_comments.get_comments_for_update(store, commitSha, size)
        return {"comments": [c.to_dict() for c in comments]}

    @app.post("/api/updates/comments")
    def create_comment(body: CommentCreateRequest):
        try:
            comment = update_comments.add_update_comment(
                store,
                commit_sha=body.commit_sha,
                wallet_address=body.wallet_address,
                username=body.username,
                content=body.content,
                parent_id=body.parent_id,
                max_length=global_config.COMMENT_MAX_LENGTH,
            )
        except CommentError as e:
            return _error(str(e))
        return {"success": True, "comment": comment.to_dict()}

    @app.delete("/api/updates/comments")
    def remove_comment(body: CommentDeleteRequest):
        try:
            update_comments.delete_update_comment(store, body.comment_id, body.wallet_address)
        except CommentError as e:
            return _error(str(e))
        return {"success": True}

    logger.info("✅ (V5.0) FastAPI 应用已初始化")
    return app
