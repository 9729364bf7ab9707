from fastapi import APIRouter

from skillsync.data.catalog import career_catalog, pathway_catalog, quiz_questions

router = APIRouter(prefix="/catalog")


@router.get("/pathways")
def list_catalog_pathways():
    return [pathway.to_wire() for pathway in pathway_catalog()]


@router.get("/careers")
def list_catalog_careers():
    return [career.to_wire() for career in career_catalog()]


@router.get("/quiz")
def list_quiz_questions():
    return [question.to_wire() for question in quiz_questions()]
