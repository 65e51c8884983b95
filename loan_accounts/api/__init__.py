"""
Loan Accounts API Application Factory
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .. import __version__
from ..config import get_config
from ..logging_config import setup_logging
from .loan_accounts import router as loan_accounts_router
from .calculator import router as calculator_router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application"""
    config = get_config()
    setup_logging(level=config.log_level, log_format=config.log_format)

    app = FastAPI(
        title="Loan Accounts API",
        description="Loan account management with fixed-payment amortization",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "Location",
            f"X-{config.application_name}-alert",
            f"X-{config.application_name}-error",
            f"X-{config.application_name}-params",
        ],
    )

    app.include_router(loan_accounts_router, prefix="/api/loan-accounts", tags=["Loan Accounts"])
    app.include_router(calculator_router, prefix="/api/loan-calculator", tags=["Loan Calculator"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "loan_accounts_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Loan Accounts API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "loan-accounts": "/api/loan-accounts",
                "loan-calculator": "/api/loan-calculator",
            }
        }

    return app


app = create_app()


def run_server(host: str = None, port: int = None, reload: bool = None):
    """Run the FastAPI server, defaulting to the configured host and port"""
    config = get_config()
    uvicorn.run(
        "loan_accounts.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=config.api_reload if reload is None else reload,
        log_level=config.log_level.lower()
    )
