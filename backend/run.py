"""
CodeSensei Backend Runner
Run with: python run.py
"""

import uvicorn
from codesensei.config import settings


if __name__ == "__main__":
    print(f"""
    ╔══════════════════════════════════════════════════════════╗
    ║                      CodeSensei                          ║
    ║              AI Tutoring Dashboard API                   ║
    ╚══════════════════════════════════════════════════════════╝

    Starting server at http://{settings.HOST}:{settings.PORT}

    API Documentation: http://localhost:{settings.PORT}/docs
    """)

    uvicorn.run(
        "codesensei.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
