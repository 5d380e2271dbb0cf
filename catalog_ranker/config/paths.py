import os

# catalog_ranker/config/paths.py

CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))      # .../catalog_ranker/config
PACKAGE_DIR = os.path.dirname(CONFIG_DIR)                    # .../catalog_ranker
PROJECT_ROOT = os.path.dirname(PACKAGE_DIR)                  # repository root

DATA_DIR = os.environ.get("CATALOG_RANKER_DATA_DIR", os.path.join(PROJECT_ROOT, "data"))

CATALOG_PATH = os.path.join(DATA_DIR, "catalog.json")
TAXONOMY_PATH = os.path.join(DATA_DIR, "taxonomy.json")
