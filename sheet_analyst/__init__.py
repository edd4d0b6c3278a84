from sheet_analyst.lib.models import Dataset, DatasetError, QueryResult
from sheet_analyst.query_engine import QueryEngine, execute

__all__ = ["Dataset", "DatasetError", "QueryEngine", "QueryResult", "execute"]
