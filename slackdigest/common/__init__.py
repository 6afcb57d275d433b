"""Common helpers shared across slackdigest subpackages."""
