"""Cassandra table and column names for the mail repository key index."""

KEYS_TABLE_NAME = "mail_repository_keys"

# Partition key: every key of a repository lives in one partition.
REPOSITORY_NAME = "repository_name"
# Clustering key: makes (repository_name, mail_key) unique.
MAIL_KEY = "mail_key"
