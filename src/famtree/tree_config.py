#!/usr/bin/env python3

import os


class Config:
    """Application configuration"""
    DATA_DIR = os.getenv("FAMTREE_DATA_DIR", os.path.join(os.path.expanduser("~"), ".famtree"))
    LOG_LEVEL = os.getenv("FAMTREE_LOG_LEVEL", "INFO")
    S3_BUCKET = os.getenv("FAMTREE_S3_BUCKET", "")
    S3_PREFIX = os.getenv("FAMTREE_S3_PREFIX", "trees/")
    S3_REGION = os.getenv("FAMTREE_S3_REGION", "us-east-1")
    S3_ENDPOINT_URL = os.getenv("FAMTREE_S3_ENDPOINT_URL", "") or None


config = Config()
