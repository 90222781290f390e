import logging
from typing import Optional

import openai
from pydantic import BaseModel

from file_type_handler import serialize_delimited
from reconciliation import AnalysisRequest, AnalysisResponse
from table_errors import InvalidAnalysisResponse, TransportFailure

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1"

SYSTEM_PROMPT = (
    "You are a CSV data analysis expert. Analyse the user's CSV data according "
    "to their instruction. First decide whether the data needs to be modified. "
    "If it does, return the modified data; if not, return the original data. "
    "Always provide your analysis or suggestions."
)


class CsvTableEdit(BaseModel):
    needsModification: bool
    message: str
    table: list[list[str]]


def build_user_prompt(request: AnalysisRequest) -> str:
    csv_text = serialize_delimited(request.current_table).rstrip("\n")
    return (
        f"Here is my CSV data:\n\n{csv_text}\n\n"
        f"Analyse and process it according to this instruction:\n{request.instruction}\n\n"
        "Decide whether the data needs modification (needsModification), give a "
        "clear analysis (message), and return the appropriate table (table) with "
        "the header row first. If no modification is needed, return the original "
        "data in the table."
    )


class OpenAIAnalysisClient:
    """Analysis collaborator backed by the OpenAI Responses API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: Optional[str] = None,
        timeout: float = 60.0,
        client=None,
    ):
        self.model = model
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _get_client(self):
        if self._client is None:
            try:
                self._client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout)
            except openai.OpenAIError as exc:
                raise TransportFailure(str(exc)) from exc
        return self._client

    def configure(self, model: Optional[str] = None, api_key: Optional[str] = None):
        if model:
            self.model = model
        if api_key and api_key != self.api_key:
            self.api_key = api_key
            # rebuilt with the new key on the next call
            self._client = None

    def analyze(self, request: AnalysisRequest) -> AnalysisResponse:
        client = self._get_client()
        logger.info("Requesting analysis from %s", self.model)
        try:
            response = client.responses.parse(
                model=self.model,
                input=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(request)},
                ],
                text_format=CsvTableEdit,
            )
        except openai.OpenAIError as exc:
            raise TransportFailure(str(exc)) from exc

        parsed = getattr(response, "output_parsed", None)
        if parsed is None:
            raise InvalidAnalysisResponse("No valid response from the model")
        return AnalysisResponse.from_payload(
            {
                "needsChange": parsed.needsModification,
                "narrative": parsed.message,
                "table": parsed.table,
            }
        )
