"""Database row types, coin storage formats, batching and SQLite validator storage."""