# Services package.
#
# Each module exposes async functions that encapsulate business logic
# and database access for one concern:
#
#   reaction_service  per-user Like/Dislike rows (upsert, batch reads)
#   counter_service   denormalized like/dislike counters on posts
#   guards            existence-then-authorship checks for mutations
#   blog_service      minimal blog lookup/creation (blogs own posts)
#   post_service      post listings, detail, reactions, owner CRUD
#   comment_service   comment CRUD, listing and reactions
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Failures surface as ``blog_platform.errors``.
