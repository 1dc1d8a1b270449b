"""
Unit tests for calculation.formulas module.
"""
import pytest
from calculation.formulas import ENGINEERING_FORMULAS, FormulaCatalog, get_default_catalog


class TestEngineeringFormulas:
    """Tests for the static formula table."""

    def test_ids_unique(self):
        """Test every formula id is unique."""
        ids = [formula.id for formula in ENGINEERING_FORMULAS]
        assert len(ids) == len(set(ids))

    def test_every_formula_has_variables(self):
        """Test each formula declares its variables."""
        for formula in ENGINEERING_FORMULAS:
            assert formula.variables, formula.id

    def test_examples_reference_declared_symbols(self):
        """Test example inputs only use declared symbols."""
        for formula in ENGINEERING_FORMULAS:
            symbols = {variable.symbol for variable in formula.variables}
            for example in formula.examples:
                assert set(example.inputs) <= symbols, formula.id

    def test_formulas_hashable(self):
        """Test catalog entries can be hashed and used in sets."""
        assert len(set(ENGINEERING_FORMULAS)) == len(ENGINEERING_FORMULAS)
        for formula in ENGINEERING_FORMULAS:
            assert hash(formula) == hash(formula)

    def test_example_inputs_read_only(self):
        """Test example inputs cannot be changed at runtime."""
        example = get_default_catalog().get_by_id('belt-ratio').examples[0]

        with pytest.raises(TypeError):
            example.inputs['D1'] = 100
        assert example.inputs['D1'] == 6

    def test_unit_conversions_read_only(self):
        """Test unit conversion tables cannot be changed at runtime."""
        for formula in ENGINEERING_FORMULAS:
            for unit_system in formula.units:
                with pytest.raises(TypeError):
                    unit_system.conversions['x'] = 1.0


class TestFormulaCatalog:
    """Tests for FormulaCatalog class."""

    def test_len_and_iter(self, catalog):
        """Test the catalog exposes all formulas."""
        assert len(catalog) == len(ENGINEERING_FORMULAS)
        assert list(catalog) == list(ENGINEERING_FORMULAS)

    def test_get_by_id(self, catalog):
        """Test id lookup."""
        formula = catalog.get_by_id("ohms-law-voltage")

        assert formula is not None
        assert formula.formula == "V = I * R"

    def test_get_by_id_unknown(self, catalog):
        """Test unknown ids return None."""
        assert catalog.get_by_id("warp-drive") is None

    def test_get_by_category(self, catalog):
        """Test category lookup keeps catalog order."""
        mechanical = catalog.get_by_category("mechanical")

        assert [f.id for f in mechanical] == [
            'motor-rpm-to-linear-speed',
            'rpm-to-fpm',
            'torque-power-rpm',
            'belt-ratio',
        ]
        assert catalog.get_by_category("astrology") == ()

    def test_categories(self, catalog):
        """Test all categories are indexed."""
        assert set(catalog.categories) == {
            'mechanical', 'electrical', 'fluid_dynamics', 'structural', 'thermodynamics'
        }

    def test_search_by_tag(self, catalog):
        """Test search matches tags."""
        ids = [f.id for f in catalog.search("pulley")]

        assert 'rpm-to-fpm' in ids
        assert 'belt-ratio' in ids

    def test_search_case_insensitive(self, catalog):
        """Test search ignores case."""
        assert catalog.search("OHM") == catalog.search("ohm")

    def test_search_whole_query_substring(self, catalog):
        """Test a multi-word query must appear as one substring."""
        assert catalog.search("pulley torque") == []

    def test_duplicate_ids_rejected(self):
        """Test building a catalog with duplicate ids raises."""
        with pytest.raises(ValueError):
            FormulaCatalog(ENGINEERING_FORMULAS + ENGINEERING_FORMULAS[:1])

    def test_default_catalog_shared(self):
        """Test the default catalog is built once."""
        assert get_default_catalog() is get_default_catalog()
