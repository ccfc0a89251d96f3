from portal_api.utils.matrix import merge_id_lists, parse_matrix, split_id_list, tab_row


def test_split_id_list_accepts_mixed_delimiters():
    assert split_id_list("TP53 BRCA1,EGFR+KRAS") == ["TP53", "BRCA1", "EGFR", "KRAS"]
    assert split_id_list("  S1\tS2\n S3 ") == ["S1", "S2", "S3"]


def test_split_id_list_blank():
    assert split_id_list("") == []
    assert split_id_list(None) == []
    assert split_id_list(" , + ") == []


def test_merge_id_lists_flattens_repeated_params():
    assert merge_id_lists(["TP53,BRCA1", "EGFR"]) == ["TP53", "BRCA1", "EGFR"]
    assert merge_id_lists(None) == []


def test_tab_row():
    assert tab_row(["GENE_ID", "COMMON", 7157]) == "GENE_ID\tCOMMON\t7157\n"


def test_parse_matrix_skips_comments_and_blank_lines():
    content = (
        "# DATA_TYPE\tmRNA\n"
        "# COLOR_GRADIENT_SETTINGS\tMRNA_EXPRESSION\n"
        "GENE_ID\tCOMMON\tS1\tS2\n"
        "\n"
        "7157\tTP53\t1.0\t2.0\n"
    )
    assert parse_matrix(content) == [
        ["GENE_ID", "COMMON", "S1", "S2"],
        ["7157", "TP53", "1.0", "2.0"],
    ]


def test_parse_matrix_pads_short_rows():
    assert parse_matrix("A\tB\tC\n1\t2\n") == [["A", "B", "C"], ["1", "2", ""]]


def test_parse_matrix_single_line_message():
    text = "No genetic profile available for genetic_profile_id:  x.\n"
    assert parse_matrix(text) == [["No genetic profile available for genetic_profile_id:  x."]]


def test_parse_matrix_empty():
    assert parse_matrix("") == []
