"""Router for UI, schema and prompt generation."""

from fastapi import APIRouter, HTTPException

from flowgen.core.errors import GenerationError, InvalidRequestError
from flowgen.core.logging import get_logger
from flowgen.generation.refine import prompt_refiner
from flowgen.generation.schema import schema_generator
from flowgen.generation.ui import ui_generator
from flowgen.models.schemas import (
    CreateSchemaRequest,
    CreateSchemaResponse,
    GenerateUIRequest,
    GenerateUIResponse,
    RefinePromptRequest,
    RefinePromptResponse,
)

logger = get_logger(__name__)

router = APIRouter()


@router.post("/generate-ui", response_model=GenerateUIResponse)
async def generate_ui(request: GenerateUIRequest):
    """Generate Tailwind markup for a page node."""
    try:
        return await ui_generator.generate(request.prompt, kind=request.type)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("generate_ui_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate UI component")


@router.post("/create-schema", response_model=CreateSchemaResponse)
async def create_schema(request: CreateSchemaRequest):
    """Generate a table definition for a data node."""
    try:
        return await schema_generator.generate(request.description)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except GenerationError as e:
        logger.error("create_schema_invalid_output", error=str(e))
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error("create_schema_error", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to generate schema")


@router.post("/refine-prompt", response_model=RefinePromptResponse)
async def refine_prompt(request: RefinePromptRequest):
    """Refine a node prompt from a chat message and regenerate the node."""
    try:
        return await prompt_refiner.refine(request)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error("refine_prompt_error", error=str(e), node_id=request.node_id)
        raise HTTPException(status_code=500, detail="Failed to refine prompt")
