import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Form, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

import auth
import comments
import product_query
import products
import trending
import votes
from config import Config
from database import get_db, init_db
from errors import DirectoryError, Unauthorized, ValidationError
from models import utcnow
from schemas import (CommentOut, HomePage, ProductDetail, ProductFilters, ProductFormOptions, ProductIndex,
                     ProductSummary, UserOut, VoteOut)

logging.basicConfig(level=Config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Made in Malaysia Product Directory")

LOGIN_URL = "/login"


@app.exception_handler(DirectoryError)
def handle_directory_error(request: Request, exc: DirectoryError):
    if isinstance(exc, Unauthorized):
        if "text/html" in request.headers.get("accept", ""):
            return RedirectResponse(url=LOGIN_URL, status_code=status.HTTP_303_SEE_OTHER)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "login_url": LOGIN_URL})
    if isinstance(exc, ValidationError):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "errors": exc.errors})
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


def _parse_page(raw_value: Optional[str]) -> int:
    try:
        parsed = int(raw_value)
    except (TypeError, ValueError):
        return 1
    return max(1, min(10_000, parsed))


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(key=Config.SESSION_COOKIE_NAME, value=token, httponly=True, samesite="lax")


@app.get("/health-check")
def health_check():
    return {"status": "ok", "timestamp": utcnow().isoformat() + "Z"}


@app.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register_user(response: Response,
                  name: Optional[str] = Form(None),
                  email: Optional[str] = Form(None),
                  password: Optional[str] = Form(None),
                  db: Session = Depends(get_db)):
    user = auth.register_user(db, {"name": name, "email": email, "password": password})
    _set_session_cookie(response, auth.start_session(db, user))
    return user


@app.post("/login", response_model=UserOut)
def login_user(response: Response,
               email: str = Form(...),
               password: str = Form(...),
               db: Session = Depends(get_db)):
    user = auth.authenticate(db, email, password)
    _set_session_cookie(response, auth.start_session(db, user))
    return user


@app.get("/logout")
def logout(request: Request, db: Session = Depends(get_db)):
    auth.end_session(db, request.cookies.get(Config.SESSION_COOKIE_NAME))
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(key=Config.SESSION_COOKIE_NAME)
    return response


@app.get("/", response_model=HomePage)
def home(db: Session = Depends(get_db)):
    return trending.home_page(db)


@app.get("/products", response_model=ProductIndex)
def list_products(type: Optional[str] = None,
                  location: Optional[str] = None,
                  tag: Optional[str] = None,
                  sort: Optional[str] = None,
                  page: Optional[str] = None,
                  db: Session = Depends(get_db)):
    filters = ProductFilters(
        type=type or None,
        location=location or None,
        tag=tag or None,
        sort=product_query.resolve_sort(sort),
    )
    return ProductIndex(
        products=product_query.query_products(db, filters, page=_parse_page(page)),
        filters=filters,
        filter_options=product_query.filter_options(db),
    )


@app.get("/products/create", response_model=ProductFormOptions)
def create_product_form(current_user_id: Optional[int] = Depends(auth.current_user_id)):
    auth.require_user(current_user_id)
    return products.form_options()


@app.post("/products", response_model=ProductSummary, status_code=status.HTTP_201_CREATED)
def create_product(title: Optional[str] = Form(None),
                   description: Optional[str] = Form(None),
                   url: Optional[str] = Form(None),
                   tags: Optional[List[str]] = Form(None),
                   project_type: Optional[str] = Form(None),
                   location: Optional[str] = Form(None),
                   is_made_in_my: Optional[str] = Form(None),
                   db: Session = Depends(get_db),
                   current_user_id: Optional[int] = Depends(auth.current_user_id)):
    return products.create_product(db, current_user_id, {
        "title": title,
        "description": description,
        "url": url,
        "tags": tags,
        "project_type": project_type,
        "location": location,
        "is_made_in_my": is_made_in_my,
    })


@app.get("/products/{product_id}", response_model=ProductDetail)
def product_detail(product_id: int,
                   db: Session = Depends(get_db),
                   current_user_id: Optional[int] = Depends(auth.current_user_id)):
    return products.get_product_detail(db, product_id, viewer_id=current_user_id)


@app.post("/votes", response_model=VoteOut)
def toggle_vote(product_id: int = Form(...),
                db: Session = Depends(get_db),
                current_user_id: Optional[int] = Depends(auth.current_user_id)):
    result = votes.toggle_vote(db, current_user_id, product_id)
    return VoteOut(state=result.state.value, votes_count=result.votes_count)


@app.post("/comments", response_model=CommentOut, status_code=status.HTTP_201_CREATED)
def add_comment(content: Optional[str] = Form(None),
                product_id: Optional[int] = Form(None),
                db: Session = Depends(get_db),
                current_user_id: Optional[int] = Depends(auth.current_user_id)):
    return comments.add_comment(db, current_user_id, product_id, content)


@app.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(comment_id: int,
                   db: Session = Depends(get_db),
                   current_user_id: Optional[int] = Depends(auth.current_user_id)):
    comments.delete_comment(db, current_user_id, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
