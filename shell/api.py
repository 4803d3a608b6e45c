import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Optional, Union

from fastapi import APIRouter, Depends, FastAPI, File, HTTPException, Request, Response, UploadFile, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ledger import LedgerError
from flows import (
    ValidationError,
    InvalidStateTransitionError,
    WatchState,
    EditResult,
    ReferralState,
    WithdrawalDraft,
    WithdrawalReceipt,
    WithdrawalState,
)
from flows.edit import DEFAULT_SAVE_NAME, EDITED_MIME_TYPE
from imaging import ImageEditClient
from .app import RewardsApp, ShellState, Tab
from .config import Settings, get_settings
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


class PromptRequest(BaseModel):
    prompt: str


class GenerateRequest(BaseModel):
    prompt: Optional[str] = None


class WithdrawRequest(BaseModel):
    amount: Union[str, Decimal]


class ClaimResponse(BaseModel):
    balance: Decimal
    watch: WatchState


class SubmitResponse(BaseModel):
    draft: WithdrawalDraft
    withdrawal: WithdrawalState


class ConfirmResponse(BaseModel):
    receipt: WithdrawalReceipt
    withdrawal: WithdrawalState


router = APIRouter()


async def get_shell(request: Request) -> RewardsApp:
    shell = request.app.state.shell
    if shell is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Application is not started")
    return shell


@router.get("/health", tags=["System"])
def health_check():
    return {"status": "healthy", "service": "viewinsta-rewards"}


@router.get("/state", response_model=ShellState, tags=["Navigation"])
async def get_state(shell: RewardsApp = Depends(get_shell)) -> ShellState:
    return shell.state()


@router.post("/tabs/{tab}", response_model=ShellState, tags=["Navigation"])
async def select_tab(tab: Tab, shell: RewardsApp = Depends(get_shell)) -> ShellState:
    return shell.select_tab(tab)


@router.get("/watch", response_model=WatchState, tags=["Watch"])
async def get_watch(shell: RewardsApp = Depends(get_shell)) -> WatchState:
    return shell.watch.state()


@router.post("/watch/claim", response_model=ClaimResponse, tags=["Watch"])
async def claim_reward(shell: RewardsApp = Depends(get_shell)) -> ClaimResponse:
    flow = shell.watch
    balance = await flow.claim()
    return ClaimResponse(balance=balance, watch=flow.state())


@router.get("/edit", response_model=EditResult, tags=["Edit"])
async def get_edit(shell: RewardsApp = Depends(get_shell)) -> EditResult:
    return shell.edit.result()


@router.post("/edit/image", response_model=EditResult, tags=["Edit"])
async def upload_image(file: UploadFile = File(...), shell: RewardsApp = Depends(get_shell)) -> EditResult:
    flow = shell.edit
    data = await file.read()
    return flow.select_image(data, file.content_type or "application/octet-stream", file.filename)


@router.put("/edit/prompt", response_model=EditResult, tags=["Edit"])
async def set_prompt(request: PromptRequest, shell: RewardsApp = Depends(get_shell)) -> EditResult:
    return shell.edit.set_prompt(request.prompt)


@router.post("/edit/generate", response_model=EditResult, tags=["Edit"])
async def generate_edit(request: GenerateRequest, shell: RewardsApp = Depends(get_shell)) -> EditResult:
    return await shell.edit.generate(request.prompt)


@router.post("/edit/reset", response_model=EditResult, tags=["Edit"])
async def reset_edit(shell: RewardsApp = Depends(get_shell)) -> EditResult:
    return shell.edit.reset()


@router.get("/edit/original", tags=["Edit"])
async def get_original_image(shell: RewardsApp = Depends(get_shell)) -> Response:
    original = shell.edit.original
    if original is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No image selected")
    return Response(content=original.data, media_type=original.mime_type)


@router.get("/edit/result", tags=["Edit"])
async def download_edited_image(shell: RewardsApp = Depends(get_shell)) -> Response:
    edited = shell.edit.edited
    if edited is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No edited image available")
    return Response(
        content=edited,
        media_type=EDITED_MIME_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{DEFAULT_SAVE_NAME}"'},
    )


@router.get("/refer", response_model=ReferralState, tags=["Refer"])
async def get_referral(shell: RewardsApp = Depends(get_shell)) -> ReferralState:
    return shell.refer.state()


@router.post("/refer/copy", response_model=ReferralState, tags=["Refer"])
async def copy_referral_link(shell: RewardsApp = Depends(get_shell)) -> ReferralState:
    return shell.refer.copy()


@router.get("/withdraw", response_model=WithdrawalState, tags=["Withdraw"])
async def get_withdrawal(shell: RewardsApp = Depends(get_shell)) -> WithdrawalState:
    return shell.withdraw.state()


@router.post("/withdraw", response_model=SubmitResponse, tags=["Withdraw"])
async def submit_withdrawal(request: WithdrawRequest, shell: RewardsApp = Depends(get_shell)) -> SubmitResponse:
    flow = shell.withdraw
    draft = flow.submit(str(request.amount))
    return SubmitResponse(draft=draft, withdrawal=flow.state())


@router.post("/withdraw/confirm", response_model=ConfirmResponse, tags=["Withdraw"])
async def confirm_withdrawal(shell: RewardsApp = Depends(get_shell)) -> ConfirmResponse:
    flow = shell.withdraw
    receipt = flow.confirm()
    return ConfirmResponse(receipt=receipt, withdrawal=flow.state())


@router.post("/withdraw/cancel", response_model=WithdrawalState, tags=["Withdraw"])
async def cancel_withdrawal(shell: RewardsApp = Depends(get_shell)) -> WithdrawalState:
    return shell.withdraw.cancel()


@router.post("/withdraw/acknowledge", response_model=WithdrawalState, tags=["Withdraw"])
async def acknowledge_withdrawal(shell: RewardsApp = Depends(get_shell)) -> WithdrawalState:
    return shell.withdraw.acknowledge()


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "code": exc.code},
    )


async def state_error_handler(request: Request, exc: InvalidStateTransitionError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    logger.error("Ledger rejected operation: %s", exc)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


def create_app(settings: Optional[Settings] = None, image_client=None) -> FastAPI:
    """Build the HTTP app.

    The shell is created on startup. Without an injected ``image_client`` the
    Gemini client is built from settings, and a missing API key aborts startup.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level)
        if app.state.shell is None:
            client = image_client or ImageEditClient.from_settings(settings)
            app.state.shell = RewardsApp(settings, client)
            logger.info("Rewards app started with balance %s", app.state.shell.balance)
        yield
        app.state.shell.close()

    app = FastAPI(
        title="ViewInsta Rewards API",
        description="Watch. Earn. Withdraw.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.shell = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(InvalidStateTransitionError, state_error_handler)
    app.add_exception_handler(LedgerError, ledger_error_handler)
    app.include_router(router)
    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
