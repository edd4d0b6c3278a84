from typing import Any, Dict


DEFAULT_LOCALE = "en-US"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en-US": {
        # shared
        "error": "There was an error processing your query.",
        "not_understood": (
            "I don't fully understand your query. You can search for values, or ask about average, sum, count, "
            "minimum, maximum, or correlation."
        ),
        "no_numeric": "I couldn't find any numeric values in the {column} column.",
        "remote_unparsed": "I couldn't fully understand your query. Please try again.",
        # column prompts
        "need_column_average": "Please specify a column for which you want to calculate the average.",
        "need_column_sum": "Please specify a column for which you want to calculate the sum.",
        "need_column_min": "Please specify a column for which you want to find the minimum value.",
        "need_column_max": "Please specify a column for which you want to find the maximum value.",
        "need_column_unique": "Please specify a column for which you want to find unique values.",
        "need_two_columns": "Please specify two columns between which you want to calculate correlation.",
        # average / sum
        "average_answer": "The average of {column} is {value}.",
        "average_explanation": (
            "I calculated the average by adding all values in the {column} column and dividing by the number of "
            "values ({count})."
        ),
        "sum_answer": "The sum of {column} is {value}.",
        "sum_explanation": "I calculated the sum by adding all values in the {column} column.",
        # count
        "count_rows_answer": "There are a total of {count} entries in this sheet.",
        "count_rows_explanation": "I counted the total number of rows in the sheet.",
        "count_column_answer": "There are {count} non-empty entries in the {column} column.",
        "count_column_explanation": "I counted the number of non-empty values in the {column} column.",
        # min / max
        "min_answer": "The minimum value of {column} is {value}.",
        "min_explanation": "I found the smallest value in the {column} column.",
        "max_answer": "The maximum value of {column} is {value}.",
        "max_explanation": "I found the largest value in the {column} column.",
        # correlation
        "correlation_insufficient": (
            "There isn't enough numeric data in {column1} and {column2} to calculate correlation."
        ),
        "correlation_undefined": (
            "The correlation between {column1} and {column2} cannot be calculated because one of the columns "
            "has no variation."
        ),
        "correlation_answer": (
            "The correlation between {column1} and {column2} is {value}, indicating a {strength} {direction} "
            "relationship."
        ),
        "correlation_explanation": (
            "I calculated the Pearson correlation coefficient between the {column1} and {column2} columns. A value "
            "close to 1 indicates a strong positive correlation, a value close to -1 indicates a strong negative "
            "correlation, and a value close to 0 indicates no correlation."
        ),
        "strength_weak": "weak",
        "strength_moderate": "moderate",
        "strength_strong": "strong",
        "direction_positive": "positive",
        "direction_negative": "negative",
        # unique
        "unique_empty": "The {column} column contains no values or is empty.",
        "unique_more": " and {count} more",
        "unique_answer": "The {column} column contains {count} unique values: {values}.",
        "unique_explanation": "I found and counted all unique values in the {column} column.",
        # overview
        "overview_answer": (
            "Sheet overview: {rows} rows, {columns} columns. Approximately {numeric} columns contain numeric data. "
            "The columns are: {names}."
        ),
        "overview_explanation": (
            "I analyzed the basic properties of the sheet, including the number of rows, columns, and the type of "
            "data."
        ),
        # search
        "search_no_value": (
            "I couldn't identify a search value in your query. Please specify what you're looking for."
        ),
        "search_scope_column": 'the "{column}" column',
        "search_scope_all": "all columns",
        "search_found_answer": "Yes, {value} was found in the data. There are {count} match(es).",
        "search_found_explanation": 'I searched for "{value}" in {scope} and found {count} match(es).',
        "search_missing_answer": "No, {value} was not found in the data.",
        "search_missing_explanation": 'I searched for "{value}" in {scope} but found no matches.',
        # follow-up questions
        "fq_sum_of": "What is the sum of {column}?",
        "fq_average_of": "What is the average of {column}?",
        "fq_max_of": "What is the maximum value of {column}?",
        "fq_min_of": "What is the minimum value of {column}?",
        "fq_entries_in": "How many entries are there in {column}?",
        "fq_unique_in": "What are the unique values in {column}?",
        "fq_total_entries": "How many entries are there in total?",
        "fq_min_entries": "How many entries have the minimum value?",
        "fq_max_entries": "How many entries have the maximum value?",
        "fq_other_correlations": "Are there other columns that correlate with {column}?",
        "fq_most_common": "What is the most common value in {column}?",
        "fq_distribution": "What is the distribution of values in {column}?",
        "fq_numeric_columns": "Which columns contain numeric data?",
        "fq_most_unique_column": "What is the column with the most unique values?",
        "fq_numeric_correlations": "Are there correlations between the numeric columns?",
        "fq_overview": "Give me an overview of the data.",
        "fq_values_in_column": "What values exist in this column?",
        "fq_entries_with_value": "How many entries have the value {value}?",
        "fq_similar_entries": "Are there other entries with similar values?",
        "fq_unique_count_in": "How many unique values are there in {column}?",
    },
    "de-DE": {
        "error": "Es gab einen Fehler bei der Verarbeitung Ihrer Anfrage.",
        "not_understood": (
            "Ich verstehe Ihre Anfrage nicht vollständig. Sie können nach Werten suchen, oder Fragen über "
            "Durchschnitt, Summe, Anzahl, Minimum, Maximum oder Korrelation stellen."
        ),
        "no_numeric": "Ich konnte keine numerischen Werte in der Spalte {column} finden.",
        "remote_unparsed": "Ich konnte Ihre Anfrage nicht vollständig verstehen. Bitte versuchen Sie es erneut.",
        "need_column_average": "Bitte geben Sie eine Spalte an, für die Sie den Durchschnitt berechnen möchten.",
        "need_column_sum": "Bitte geben Sie eine Spalte an, für die Sie die Summe berechnen möchten.",
        "need_column_min": "Bitte geben Sie eine Spalte an, für die Sie den Minimalwert finden möchten.",
        "need_column_max": "Bitte geben Sie eine Spalte an, für die Sie den Maximalwert finden möchten.",
        "need_column_unique": "Bitte geben Sie eine Spalte an, für die Sie einzigartige Werte finden möchten.",
        "need_two_columns": (
            "Bitte geben Sie zwei Spalten an, zwischen denen Sie die Korrelation berechnen möchten."
        ),
        "average_answer": "Der Durchschnitt von {column} ist {value}.",
        "average_explanation": (
            "Ich habe den Durchschnitt berechnet, indem ich alle Werte in der Spalte {column} addiert und durch "
            "die Anzahl der Werte ({count}) geteilt habe."
        ),
        "sum_answer": "Die Summe von {column} ist {value}.",
        "sum_explanation": "Ich habe die Summe berechnet, indem ich alle Werte in der Spalte {column} addiert habe.",
        "count_rows_answer": "Es gibt insgesamt {count} Einträge in dieser Tabelle.",
        "count_rows_explanation": "Ich habe die Gesamtzahl der Zeilen in der Tabelle gezählt.",
        "count_column_answer": "Es gibt {count} nicht-leere Einträge in der Spalte {column}.",
        "count_column_explanation": "Ich habe die Anzahl der nicht-leeren Werte in der Spalte {column} gezählt.",
        "min_answer": "Der Minimalwert von {column} ist {value}.",
        "min_explanation": "Ich habe den kleinsten Wert in der Spalte {column} gefunden.",
        "max_answer": "Der Maximalwert von {column} ist {value}.",
        "max_explanation": "Ich habe den größten Wert in der Spalte {column} gefunden.",
        "correlation_insufficient": (
            "Es gibt nicht genügend numerische Daten in {column1} und {column2}, um eine Korrelation zu berechnen."
        ),
        "correlation_undefined": (
            "Die Korrelation zwischen {column1} und {column2} kann nicht berechnet werden, weil eine der Spalten "
            "keine Streuung hat."
        ),
        "correlation_answer": (
            "Die Korrelation zwischen {column1} und {column2} ist {value}, was auf eine {strength} {direction} "
            "Beziehung hinweist."
        ),
        "correlation_explanation": (
            "Ich habe den Pearson-Korrelationskoeffizienten zwischen den Spalten {column1} und {column2} "
            "berechnet. Ein Wert nahe 1 bedeutet eine starke positive Korrelation, ein Wert nahe -1 bedeutet eine "
            "starke negative Korrelation, und ein Wert nahe 0 bedeutet keine Korrelation."
        ),
        "strength_weak": "schwache",
        "strength_moderate": "moderate",
        "strength_strong": "starke",
        "direction_positive": "positive",
        "direction_negative": "negative",
        "unique_empty": "Die Spalte {column} enthält keine Werte oder ist leer.",
        "unique_more": " und {count} weitere",
        "unique_answer": "Die Spalte {column} enthält {count} einzigartige Werte: {values}.",
        "unique_explanation": "Ich habe alle einzigartigen Werte in der Spalte {column} gefunden und gezählt.",
        "overview_answer": (
            "Tabellenübersicht: {rows} Zeilen, {columns} Spalten. Davon sind etwa {numeric} Spalten numerisch. "
            "Die Spalten sind: {names}."
        ),
        "overview_explanation": (
            "Ich habe die grundlegenden Eigenschaften der Tabelle analysiert, einschließlich der Anzahl der "
            "Zeilen, Spalten und der Art der Daten."
        ),
        "search_no_value": (
            "Ich konnte keinen Suchwert in Ihrer Anfrage erkennen. Bitte geben Sie an, wonach Sie suchen möchten."
        ),
        "search_scope_column": 'der Spalte "{column}"',
        "search_scope_all": "allen Spalten",
        "search_found_answer": "Ja, {value} wurde in den Daten gefunden. Es gibt {count} Übereinstimmung(en).",
        "search_found_explanation": 'Ich habe nach "{value}" in {scope} gesucht und {count} Übereinstimmung(en) gefunden.',
        "search_missing_answer": "Nein, {value} wurde nicht in den Daten gefunden.",
        "search_missing_explanation": (
            'Ich habe nach "{value}" in {scope} gesucht, aber keine Übereinstimmungen gefunden.'
        ),
        "fq_sum_of": "Was ist die Summe von {column}?",
        "fq_average_of": "Was ist der Durchschnitt von {column}?",
        "fq_max_of": "Was ist der Maximalwert von {column}?",
        "fq_min_of": "Was ist der Minimalwert von {column}?",
        "fq_entries_in": "Wie viele Einträge gibt es in {column}?",
        "fq_unique_in": "Was sind die einzigartigen Werte in {column}?",
        "fq_total_entries": "Wie viele Einträge gibt es insgesamt?",
        "fq_min_entries": "Wie viele Einträge haben den Minimalwert?",
        "fq_max_entries": "Wie viele Einträge haben den Maximalwert?",
        "fq_other_correlations": "Gibt es andere Spalten, die mit {column} korrelieren?",
        "fq_most_common": "Was ist der häufigste Wert in {column}?",
        "fq_distribution": "Wie ist die Verteilung der Werte in {column}?",
        "fq_numeric_columns": "Welche Spalten enthalten numerische Daten?",
        "fq_most_unique_column": "Was ist die Spalte mit den meisten einzigartigen Werten?",
        "fq_numeric_correlations": "Gibt es Korrelationen zwischen den numerischen Spalten?",
        "fq_overview": "Gib mir einen Überblick über die Daten.",
        "fq_values_in_column": "Welche Werte gibt es in dieser Spalte?",
        "fq_entries_with_value": "Wie viele Einträge haben den Wert {value}?",
        "fq_similar_entries": "Gibt es andere Einträge mit ähnlichen Werten?",
        "fq_unique_count_in": "Wie viele einzigartige Werte gibt es in {column}?",
    },
}


def render(locale: str, key: str, **params: Any) -> str:
    """Render message `key` for `locale`; unknown locales fall back to English."""
    table = MESSAGES.get(locale) or MESSAGES[DEFAULT_LOCALE]
    template = table.get(key)
    if template is None:
        template = MESSAGES[DEFAULT_LOCALE][key]
    return template.format(**params) if params else template


__all__ = ["DEFAULT_LOCALE", "MESSAGES", "render"]
