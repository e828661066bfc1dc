from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models import storage
from models.article import Article
from models.schemas.article import ArticleCreateSchema, ArticleUpdateSchema, ArticleOutSchema
from models.schemas.common import PaginationMetaSchema
from utils.exceptions import NotFound

bp = Blueprint("articles", __name__)

create_schema = ArticleCreateSchema()
update_schema = ArticleUpdateSchema()
out_schema = ArticleOutSchema()
out_list_schema = ArticleOutSchema(many=True)
meta_schema = PaginationMetaSchema()


def _get_article_or_404(article_id: str) -> Article:
    article = storage.find_article(article_id)
    if article is None:
        raise NotFound("Article not found")
    return article


@bp.post("/articles")
def create_article():
    """
    Create an article (editor/admin); the caller becomes its author
    ---
    tags: [Articles]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, minLength: 3, maxLength: 200 }
            content: { type: string, minLength: 10 }
    responses:
      201: { description: Created }
      403: { description: Forbidden - Editor/Admin access required }
      422: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    article = Article(title=data["title"], content=data["content"], author_id=g.current_user.id)
    storage.new(article)
    storage.save()
    return jsonify({"data": out_schema.dump(_get_article_or_404(article.id))}), 201


@bp.get("/articles")
def list_articles():
    """
    List articles newest first, one fixed-size page at a time
    ---
    tags: [Articles]
    security:
      - Bearer: []
    parameters:
      - in: query
        name: cursor
        type: string
        required: false
        description: "id of the last article of the previous page"
    responses:
      200: { description: "Paginated list: {data, meta: {cursor?, hasMore}}" }
      401: { description: Unauthorized }
    """
    page = current_app.extensions["pagination"].page(request.args.get("cursor"))
    return jsonify(
        {
            "data": out_list_schema.dump(page.items),
            "meta": meta_schema.dump({"cursor": page.next_cursor, "has_more": page.has_more}),
        }
    ), 200


@bp.get("/articles/<article_id>")
def get_article(article_id: str):
    """
    Get an article by id
    ---
    tags: [Articles]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: article_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Article not found }
    """
    return jsonify({"data": out_schema.dump(_get_article_or_404(article_id))}), 200


@bp.patch("/articles/<article_id>")
def update_article(article_id: str):
    """
    Update an article (editor/admin)
    ---
    tags: [Articles]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: path
        name: article_id
        type: string
        required: true
      - in: body
        name: body
        schema:
          type: object
          properties:
            title: { type: string }
            content: { type: string }
    responses:
      200: { description: OK }
      404: { description: Article not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    article = _get_article_or_404(article_id)
    if data.get("title"):
        article.title = data["title"]
    if data.get("content"):
        article.content = data["content"]
    article.save()
    return jsonify({"data": out_schema.dump(article)}), 200


@bp.delete("/articles/<article_id>")
def delete_article(article_id: str):
    """
    Soft delete an article (editor/admin)
    ---
    tags: [Articles]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: article_id
        type: string
        required: true
    responses:
      204: { description: Deleted }
      404: { description: Article not found }
    """
    _get_article_or_404(article_id).soft_delete()
    return ("", 204)
