# Services package.
#
# One class per aggregate, built per request with its repositories passed
# to the constructor (see ``app.dependencies``):
#
#   category_service.CategoryService  — per-user category lookup
#   article_service.ArticleService    — CRUD + pagination + cache for Article
#
# Every public method returns an ``app.results`` variant instead of raising
# for expected outcomes; the router layer turns those into HTTP responses.
