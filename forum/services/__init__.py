# Services package.
#
# One module per aggregate:
#
#   comment_service   comments on articles, ownership checks, counts
#   reply_service     replies under a comment
#   reaction_service  like / unlike toggling and reaction counts
#   article_service   posting and reading articles
#   member_service    member registration and lookup
#
# Services receive their repositories and identity resolver through the
# constructor (member_service takes the session directly).  They flush
# but never commit; the ``get_db`` dependency owns the transaction.
# Business-rule failures are returned as ``forum.errors.ServiceError``
# values, not raised.
