from flask import Flask, request, jsonify
from flask_cors import CORS
import minicompiler

app = Flask(__name__)
CORS(app)  # allow cross-origin requests

def token_to_dict(token):
    return {
        "type": token.type,
        "value": token.value,
        "lineno": token.lineno
    }

@app.route("/compile", methods=["POST"])
def compile_code():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    code = data.get("code", "")
    try:
        result = minicompiler.compile_source(code, verbose=False)

        response = {
            "tokens": [token_to_dict(t) for t in result['tokens']],
            "tac": [repr(t) for t in result['tac']],
            "optimized_tac": [repr(t) for t in result['optimized_tac']],
            "assembly": result['asm'],
            "errors": result['errors'],
            "symbol_table": result['symbol_table'],
            "value_map": result['value_map'],
            "temp_map": result['temp_map']
        }
        return jsonify(response)
    except Exception as e:
        app.logger.exception("compilation failed")
        return jsonify({
            "tokens": [],
            "tac": [],
            "optimized_tac": [],
            "assembly": [],
            "errors": [f"Unexpected error: {str(e)}"],
            "symbol_table": [],
            "value_map": {},
            "temp_map": {}
        }), 500

if __name__ == "__main__":
    app.run(debug=True)
