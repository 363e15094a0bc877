"""Service standards (PS codes) offered by the order form."""
from typing import Optional

from fastapi import APIRouter, Query

from ..responses import success_response
from ..schemas import ServiceStandardResponse

router = APIRouter(prefix="/service-standards", tags=["service-standards"])

SERVICE_STANDARDS = [
    ("AC-01", "Mobilizaçâo canteiro de obra"),
    ("AC-02", "Furaçâo de lajes para colunas"),
    ("AC-03", "Protótipo colunas e manifolds"),
    ("AC-04", "Fixação de perfilados shaft central"),
    ("AC-05", "Coluna recalque de água"),
    ("AC-06", "Colunas AF"),
    ("AC-07", "Colunas AQ/Retorno"),
    ("AC-08", "Montagem manifold no local"),
    ("AC-09", "Montagem de barrilete cobertura"),
    ("AC-10", "Enchimento e testes colunas"),
    ("AC-11", "Desvios águas horizontais hall"),
    ("SB-01", "Preparação apartamento"),
    ("SB-02", "Janelas forro de gesso"),
    ("SB-03", "Furação de vigas e paredes"),
    ("SB-04", "Fixação perfilados teto"),
    ("SB-05", "Embutimentos ramais convencionais"),
    ("SB-06", "Barrilete aéreo em pex"),
    ("SB-07", "Retirada papelerias/saboneteiras"),
    ("SB-08", "Chumbamento tubo camisa"),
    ("SB-10", "Ponto para tanque/mlr canaleta"),
    ("SB-11", "Ponto para pia embutido"),
    ("SB-12", "Mudança ponto para pia bancada"),
    ("SF-01", "Ponto para lavatório aparente"),
    ("SF-02", "Ponto para bidê aparente"),
    ("SF-03", "Ponto chuveiro embutido"),
    ("SF-04", "Montagem kit chuveiro"),
    ("SF-05", "Montagem coluna de banho"),
    ("SF-06", "Preparação ponto esgoto vaso"),
    ("SF-07", "Montagem vaso ca"),
    ("SF-08", "Retirada de chuveiro elétrico"),
    ("SF-09", "Remover registro de gaveta antigo"),
    ("SF-10", "Remover registro de pressão antigo"),
    ("SF-11", "Remover válvula descarga antiga"),
    ("SF-12", "Banheiro embutido convencional af"),
    ("SF-13", "Banheiro embutido convencional af/aq"),
    ("SF-14", "Cozinha embutido convencional"),
    ("SF-15", "Área de serviço embutido convencional"),
    ("SF-17", "Desativação de colunas antigas fg"),
    ("SF-19", "Retirada de boiler no forro"),
    ("SF-20", "Descarte de vasos antigos"),
    ("SF-22", "Tampas de pedra"),
    ("KP-01", "Kit perfilados shaft central"),
    ("KP-02", "Kit coluna de recalque"),
    ("KP-03", "Kit coluna alimentação caixa d’água"),
    ("KP-04", "Kit coluna água fria"),
    ("KP-05", "Kit coluna água quente"),
    ("KP-06", "Kit manifolds"),
    ("KP-07", "Kit perfilados de teto"),
    ("KP-08", "Kit tubos camisa"),
    ("KP-09", "Preparação coluna de banho"),
    ("KP-10", "Montagem kit chuveiros"),
]


@router.get("")
def list_service_standards(prefix: Optional[str] = Query(default=None)):
    """Fixed catalogue; ``?prefix=SF`` narrows it to one group."""
    standards = [
        ServiceStandardResponse(ps_code=code, service_name=name).model_dump()
        for code, name in SERVICE_STANDARDS
        if prefix is None or code.split("-")[0] == prefix.upper()
    ]
    return success_response(standards)
