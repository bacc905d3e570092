"""
MongoDB Service - document collections.

ai_analyses keeps every raw model reply next to the application it scored,
so a bad verdict can be traced back to what the model actually said.
"""

from datetime import datetime, timezone
from typing import Optional
from pymongo.collection import Collection

from hiring_api.db.mongodb import get_collection, COLLECTIONS


class AnalysisLogService:
    """
    Raw LLM output per scored application.
    """

    def __init__(self, collection: Optional[Collection] = None):
        self.collection: Collection = collection if collection is not None else get_collection(COLLECTIONS["ai_analyses"])

    def insert(
        self,
        application_id: str,
        job_id: str,
        raw_response: str,
        used_fallback: bool
    ) -> str:
        """
        Record one model reply.

        Returns:
            MongoDB ObjectId as string
        """
        doc = {
            "application_id": application_id,
            "job_id": job_id,
            "raw_response": raw_response,
            "used_fallback": used_fallback,
            "created_at": datetime.now(timezone.utc)
        }
        result = self.collection.insert_one(doc)
        return str(result.inserted_id)
