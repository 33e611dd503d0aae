"""Purple Publishing API entry point."""

import os
from purple_publishing import create_app

app = create_app()


if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0',
            port=int(os.environ.get('PORT', 5000)))
