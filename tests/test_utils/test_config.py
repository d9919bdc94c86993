"""
Tests for configuration helpers (business hours parsing).
"""

import pytest
from datetime import time

from config import Settings, parse_ventanas


class TestParseVentanas:

    def test_dos_ventanas(self):
        assert parse_ventanas("08:00-12:00, 14:00-18:00") == [
            (time(8, 0), time(12, 0)),
            (time(14, 0), time(18, 0)),
        ]

    def test_cadena_vacia_es_dia_cerrado(self):
        assert parse_ventanas("") == []
        assert parse_ventanas(" , ") == []

    def test_inicio_posterior_al_fin(self):
        with pytest.raises(ValueError):
            parse_ventanas("18:00-08:00")

    def test_formato_invalido(self):
        with pytest.raises(ValueError):
            parse_ventanas("ocho-doce")


class TestVentanasAtencion:

    def test_horario_por_defecto(self):
        settings = Settings()

        assert settings.ventanas_atencion(0) == [(time(8, 0), time(12, 0)), (time(14, 0), time(18, 0))]
        assert settings.ventanas_atencion(4) == settings.ventanas_atencion(0)
        assert settings.ventanas_atencion(5) == [(time(8, 0), time(12, 0))]
        assert settings.ventanas_atencion(6) == []

    def test_domingo_configurable(self):
        settings = Settings(horario_domingo="09:00-11:00")
        assert settings.ventanas_atencion(6) == [(time(9, 0), time(11, 0))]

    def test_horario_invalido_rechazado(self):
        with pytest.raises(ValueError):
            Settings(horario_sabado="12:00-08:00")

    def test_log_level_invalido_usa_info(self):
        assert Settings(log_level="verbose").log_level == "INFO"

    def test_cors_origins_list(self):
        settings = Settings(cors_allowed_origins="http://a.test, ,http://b.test")
        assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
